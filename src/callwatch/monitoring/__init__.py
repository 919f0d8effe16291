"""Logging sink and timing primitives used by the call interceptor."""
