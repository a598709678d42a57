"""
AIS_Libs - AI Image Studio Library Modules

This package contains core functionality for AI Image Studio,
organized into specialized sub-packages:

- ImageEditingLib: Edit session models, live preview styling, crop selection
  and the export compositor
- GenerationLib: Text-to-image service client and long-running operation tracking
"""

__version__ = "0.1.0"
