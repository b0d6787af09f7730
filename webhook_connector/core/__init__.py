"""Configuration glue around the sink subsystem: key hashing, the
configuration store, and the lifecycle service that keeps both in step
with the SinkManager."""
