"""cfdetect inference package.

Lookups (doh, probe, ranges), CIDR containment, verdict aggregation and the
/detect route that ties them together (engine).
"""
