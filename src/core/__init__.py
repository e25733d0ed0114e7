"""Core domain package for perplexity-nudge.

Core contains keyword detection, nudge templates, and the chat message hook
without any file or host-runtime I/O, keeping the business logic portable.
"""
