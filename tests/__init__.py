"""
listingguard test suite.

- Change-set helpers and principal resolution
- Document and storage rules
- Rule table engine and engine factory
- Facade, decorator and configuration
- Audit logging and schema validation
"""
