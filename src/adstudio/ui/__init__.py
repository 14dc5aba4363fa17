"""Gradio wizard for AdStudio: product info, images, guidance, results."""
