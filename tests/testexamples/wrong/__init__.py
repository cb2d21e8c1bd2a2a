"""Malformed rule classes; discovery must reject them."""
