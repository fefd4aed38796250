# Dashboard module
