"""SheetSync: bind tabular data into scene trees through layer names."""

__version__ = "0.1.0"
