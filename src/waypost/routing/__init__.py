"""Routing: mutable per-method route table with ordered matching.

Routes can be added and removed while the router is serving; lookups
return snapshots in registration order.
"""
