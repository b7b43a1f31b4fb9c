"""HTTP clients for the Rownd API and the auxiliary analyzer service."""
