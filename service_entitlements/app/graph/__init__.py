"""
Decision graph package.

Builds an audit graph of the quiz from the same rule table the path
resolver evaluates, optionally annotated with counts from historical
submissions. Used by admin reporting only.
"""
