"""caption_editor - layered caption, emoji and shape editing over a photo."""
