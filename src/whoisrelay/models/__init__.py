from .domain_models import BulkLookupItem, ErrorPayload, LookupResult, WhoisResponse

__all__ = ["BulkLookupItem", "ErrorPayload", "LookupResult", "WhoisResponse"]
