"""hfget: interactive downloader for model weight files hosted on Hugging Face."""

__version__ = "1.2.0"
