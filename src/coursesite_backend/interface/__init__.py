from .users import UserContext, UserCreate, UserPasswordUpdate, UserEmailUpdate, EmailVerification
from .attachments import AttachmentContext
from .courses import CourseContext, CourseCreate, CourseUpdate, CourseMembersAdd, CourseMemberRoleUpdate
from .entries import EntryContext, EntryCreate, EntryUpdate
from .questions import QuestionContext, QuestionCreate, QuestionUpdate, AnswerContext, AnswerCreate, AnswerUpdate
from .notifications import NotificationContext, PushTicket
