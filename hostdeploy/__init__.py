"""hostdeploy - single-host deployment pipeline"""

__version__ = "1.0.0"
