# Infrastructure Package
