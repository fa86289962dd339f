"""Error taxonomy for interview sessions"""


class InterviewError(Exception):
    """Base class for interview domain errors"""


class TopicNotFound(InterviewError):
    """A topic name was supplied but no topic matches it"""

    def __init__(self, message: str = "Topic not found by name"):
        super().__init__(message)


class InvalidTopicReference(InterviewError):
    """Neither a usable topic id nor a topic name was supplied"""

    def __init__(self, message: str = "Invalid topic_id and no topic_name provided"):
        super().__init__(message)


class OracleUnavailable(InterviewError):
    """The language model could not produce a usable response"""


class StoreWriteFailed(InterviewError):
    """A session record could not be written"""
