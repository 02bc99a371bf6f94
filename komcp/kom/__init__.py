"""Resource catalog lookups and resource-usage table models."""