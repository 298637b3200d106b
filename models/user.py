from dataclasses import dataclass


@dataclass
class User:
    id: int | None
    email: str
    full_name: str = ""
    password_hash: str = ""
    created_at: str = ""

    def public_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "created_at": self.created_at,
        }
