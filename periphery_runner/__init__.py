"""
Periphery runner - scan Bazel-built Swift targets with Periphery.

Pipeline:
- build: bazel build with index-while-building, writing a build event log
- extract: collect .indexstore paths from the log
- remap: rewrite sandbox prefixes with index-import
- scan: run periphery against the remapped stores
"""
__version__ = "0.1.0"
