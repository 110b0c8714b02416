"""Port interfaces (protocols) between core logic and infrastructure."""
