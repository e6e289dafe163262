"""Report cards module - term report cards, subject marks and publishing."""
