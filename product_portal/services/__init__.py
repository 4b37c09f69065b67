"""
Services package for the Product Portal.

Services orchestrate product use cases on top of the gateway client.
"""
