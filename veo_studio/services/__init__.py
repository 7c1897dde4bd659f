"""
Services

Organization:
    - audio/: speech payload decoding
    - generation/: orchestration, classification, story parsing, extend
    - playback/: narration playback for the displayed result
    - session/: the session lifecycle controller
    - gemini/: google-genai implementations of the collaborator contracts
"""
