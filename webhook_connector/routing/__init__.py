"""Webhook event routing — sink lifecycle and ingestion dispatch.

Every ingested event is written to exactly one sink: the one bound to
its configuration.  The SinkManager builds that sink on first use and
keeps it until the configuration changes; the IngestionDispatcher ties an
incoming request to it.
"""
