from helpdesk.identity.domain.entities import Principal, User

__all__ = ["Principal", "User"]
