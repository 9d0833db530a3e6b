"""Numberman services.

- phones: store access (lookups, listing, history, deletion)
- transitions: status-transition engine
- aggregation: block and customer views
- generator: bulk range generator
- accounts: sign-in and approval workflow
"""
