from .base import AuthGate, extract_bearer_token
from .jwt_gate import JWTAuthGate
from .models import Identity

__all__ = ["AuthGate", "Identity", "JWTAuthGate", "extract_bearer_token"]
