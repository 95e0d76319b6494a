"""Company discovery: provider adapters, search filters, cascading search and enrichment."""
