"""
Filterchain Core - Building blocks of filter chains.

- Chain: FilterChain and SynchronizedFilterChain
- Filter: Filter base class and FunctionFilter adapter
- Box: Event envelope
- Registry: Named chains and the on()/start() API
"""

__all__ = []
