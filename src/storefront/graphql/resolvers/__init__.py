"""Resolver package for GraphQL schema.

The root Query and Mutation types and the field resolvers on the object types
import their implementations from these modules lazily, which keeps the type
modules free of database imports.
"""
