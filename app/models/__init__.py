# Registers every table on Base.metadata
from app.models.user import User
from app.models.topic import Topic
from app.models.post import MediaSource, Post
from app.models.vote import Vote, VoteType
from app.models.share import Share, ShareMedium
