"""Dropbox API access: token exchange, folder listing and share links."""
