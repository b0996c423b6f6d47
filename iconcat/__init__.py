"""iconcat — validation and normalization tooling for the STIR/BEIR icon catalogs."""

__version__ = "0.3.0"
