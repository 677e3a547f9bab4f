"""Services subpackage - persistence for documents, numbering and the price book."""
