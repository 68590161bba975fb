"""EasyEDA primitive types, legacy shape parser and JSON shape merger."""
