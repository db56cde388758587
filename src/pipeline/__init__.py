"""Retry, pagination, checkpoint and error primitives shared by the stages."""
