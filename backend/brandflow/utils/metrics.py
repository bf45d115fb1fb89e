# /brandflow/utils/metrics.py

from prometheus_client import Counter, Histogram

# This file defines all Prometheus metrics used for application monitoring.
# Centralizing them here makes them easy to find and manage.

# Flow Metrics
flow_executions_counter = Counter('flow_executions_total', 'Flow executions', ['flow', 'status'])
flow_duration_histogram = Histogram('flow_duration_seconds', 'Flow execution time in seconds', ['flow'])
parse_fallback_counter = Counter('flow_parse_fallbacks_total', 'Model responses replaced by a fallback object', ['flow'])
ai_requests_counter = Counter('ai_requests_total', 'Total AI requests', ['model', 'status'])

# Storage Metrics
cache_operations = Counter('cache_operations_total', 'Cache operations', ['operation', 'status'])
database_operations_counter = Counter('database_operations_total', 'Database operations', ['operation', 'status'])

# Lead Metrics
lead_submissions_counter = Counter('lead_submissions_total', 'Lead submissions forwarded', ['status'])

# Performance Metrics
response_time_histogram = Histogram('response_time_seconds', 'Response time in seconds', ['endpoint'])
