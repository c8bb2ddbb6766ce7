"""Batch synchronization of a content collection with the remote job API."""
