"""
Component Render Service: renders submitted Remotion components to MP4 over HTTP.
"""

__version__ = "0.1.0"
