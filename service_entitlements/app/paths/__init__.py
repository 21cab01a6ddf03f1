"""
Path assignment package.

- questions: static quiz question metadata and decisive/adjuster lists.
- resolver: ordered predicate table mapping quiz answers to an outcome path.
"""
