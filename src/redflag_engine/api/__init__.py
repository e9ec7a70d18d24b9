# HTTP API for the red-flag engine
