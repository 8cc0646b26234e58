from .user import User
from .candidate import Candidate
from .notification import Notification
# base and mixins are imported by the above as needed
