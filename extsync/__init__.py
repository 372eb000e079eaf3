"""extsync - publish extension releases to subscribed repositories."""

__version__ = "0.1.0"
