# Routes package
from .auth import auth_bp
from .emissions import emissions_bp
from .analysis import analysis_bp

__all__ = ['auth_bp', 'emissions_bp', 'analysis_bp']
