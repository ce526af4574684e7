from .poll import Poll as Poll, PollStatus as PollStatus, VisibilityMode as VisibilityMode
from .question import Question as Question, QuestionType as QuestionType, CHOICE_TYPES as CHOICE_TYPES
from .option import Option as Option
from .response import Response as Response, Answer as Answer
from .comment import Comment as Comment, CommentStatus as CommentStatus
from .ticket import Ticket as Ticket, TicketStatus as TicketStatus
from .poll_view import PollView as PollView
from .abuse_event import AbuseEvent as AbuseEvent
from .user_role import UserRole as UserRole, AppRole as AppRole

__all__ = ["Poll", "PollStatus", "VisibilityMode", "Question", "QuestionType", "CHOICE_TYPES",
           "Option", "Response", "Answer", "Comment", "CommentStatus", "Ticket", "TicketStatus",
           "PollView", "AbuseEvent", "UserRole", "AppRole"]
