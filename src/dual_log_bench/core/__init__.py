"""Dual log benchmark core: types, config, errors, clock and driver."""
