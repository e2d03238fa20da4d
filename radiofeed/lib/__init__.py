"""Shared plumbing: config, fetch helper, relay ladder, errors, service base."""
