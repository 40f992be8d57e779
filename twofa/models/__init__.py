from twofa.models.user import User
from twofa.models.audit_log import AuditLog
