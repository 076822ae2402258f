"""Publish an updated PKGBUILD to the AUR and sync it back into the main repo."""
