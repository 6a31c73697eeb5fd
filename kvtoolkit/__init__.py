"""String-keyed hashtables, a RESP reply reader and dynamic byte strings."""

__version__ = "0.1.0"
__all__ = ["hashstring", "hashtables", "reader", "sds", "sdsutil"]