# ABOUTME: Reusable components package
# ABOUTME: Hosts building blocks shared by interfaces and implementations
