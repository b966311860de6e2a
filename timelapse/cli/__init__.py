"""Command line client for the timelapse API."""
