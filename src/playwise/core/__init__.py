"""Core building blocks shared by every playwise layer."""
