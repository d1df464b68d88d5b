from .user import User
from .emission import Emission

__all__ = ['User', 'Emission']
