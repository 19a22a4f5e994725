"""PDF resolution, download and text extraction."""
