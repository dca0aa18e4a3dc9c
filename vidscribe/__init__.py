"""
HTTP front end for the transcription pipeline.

The Flask application in :mod:`vidscribe.main` accepts a list of YouTube or
Twitter/X links and returns their transcriptions.
"""
