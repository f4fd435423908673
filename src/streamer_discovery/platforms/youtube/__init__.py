"""YouTube channel discovery: Data API client, candidate filter and jobs."""
