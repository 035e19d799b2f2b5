__all__ = ()
