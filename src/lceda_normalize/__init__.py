"""LCEDA Normalize - turn EasyEDA/LCEDA library documents into {head, shape[]} records."""

__version__ = "0.1.0"
