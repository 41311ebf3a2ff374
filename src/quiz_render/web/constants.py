JOB_NOT_FOUND = "Job not found"
"""Detail returned for unknown job ids"""

JOB_NOT_CANCELLABLE = "Job is not cancellable"
JOB_CANCELLED = "Job cancelled"
JOB_NOT_READY = "Job not ready"

INVALID_QUIZ_DATA = "Valid quiz data is required"
TOO_MANY_QUESTIONS = "A quiz can have at most {} questions"
MISSING_CHAT_ID = "Missing chatId is required"
INVALID_CHAT_ID = "chatId must be a string or integer"


__all__ = [
    "INVALID_CHAT_ID",
    "INVALID_QUIZ_DATA",
    "JOB_CANCELLED",
    "JOB_NOT_CANCELLABLE",
    "JOB_NOT_FOUND",
    "JOB_NOT_READY",
    "MISSING_CHAT_ID",
    "TOO_MANY_QUESTIONS",
]
