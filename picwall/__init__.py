"""PicWall: a photo feed API."""
