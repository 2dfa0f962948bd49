"""
Streaming AI chat assistant and its conversation history.
"""
