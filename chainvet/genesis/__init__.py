"""Genesis validation metadata, creation commands and deployment files."""