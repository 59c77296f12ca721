"""Internship track catalogue used for prompts and tool-mention scoring."""
from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field

DEFAULT_TRACK = "fullstack"


class TrackContext(BaseModel):
    track_id: str
    display_name: str
    welcome_note: str
    tech_stack: List[str]
    mission_hooks: List[str] = Field(default_factory=list)
    scenarios: List[str] = Field(default_factory=list)
    friendly_questions: List[str] = Field(default_factory=list)


TRACKS: Dict[str, TrackContext] = {
    "ar-vr": TrackContext(
        track_id="ar-vr",
        display_name="Immersive Tech (AR/VR)",
        welcome_note=(
            "AR/VR is such an exciting space right now! Whether you've built full games or just "
            "experimented with basic 3D, we're looking for people who are curious and eager to learn."
        ),
        tech_stack=[
            "Unity", "Unreal Engine", "Blender", "Substance Painter", "C#", "Godot", "WebXR", "Three.js",
            "A-Frame", "Spark AR", "Lens Studio", "Maya", "ZBrush", "Oculus SDK", "SteamVR",
        ],
        mission_hooks=[
            "creating calming virtual environments for children who get overwhelmed easily",
            "making games that adapt to how a child is feeling in real-time",
            "building body tracking experiences that work without expensive VR headsets",
        ],
        scenarios=[
            "Imagine a child gets anxious during a VR experience. How might you design a 'calm down' feature that helps them feel safe?",
            "A school has basic laptops, not gaming PCs. How would you approach making a game that runs smoothly on limited hardware?",
        ],
        friendly_questions=[
            "Have you built anything in Unity or Unreal, even something simple? I'd love to hear about it.",
            "What part of 3D development do you find most interesting - the coding, the design, or the art side?",
            "If you could build any VR/AR experience, what would it be?",
        ],
    ),
    "agentic-ai": TrackContext(
        track_id="agentic-ai",
        display_name="Agentic AI",
        welcome_note=(
            "AI agents are the future of software! Whether you've played with LangChain, built chatbots, "
            "or just used ChatGPT a lot, we're excited to see what you bring."
        ),
        tech_stack=[
            "LangChain", "LangGraph", "CrewAI", "AutoGen", "Google ADK", "OpenAI API", "Anthropic API",
            "HuggingFace", "LlamaIndex", "Pinecone", "Weaviate", "ChromaDB", "Python", "FastAPI",
            "Streamlit", "Gradio",
        ],
        mission_hooks=[
            "building AI assistants that help therapists and parents communicate better",
            "creating agents that can understand and summarize therapy notes",
            "automating repetitive administrative work for special schools",
        ],
        scenarios=[
            "Imagine building an AI assistant for a tired parent who needs simple answers about their child's therapy. What would you keep in mind?",
            "How would you approach building a chatbot that summarizes long therapy documents into simple language?",
        ],
        friendly_questions=[
            "Have you tried building anything with ChatGPT API, LangChain, or similar tools?",
            "What's the coolest AI application you've seen recently that made you think 'wow'?",
            "If you could build any AI assistant, what would it do?",
        ],
    ),
    "data-science": TrackContext(
        track_id="data-science",
        display_name="Data Science",
        welcome_note=(
            "Data science is all about finding patterns and insights! Whether you've done Kaggle "
            "competitions, built simple ML models, or just love working with data, we'd love to hear about it."
        ),
        tech_stack=[
            "Python", "Pandas", "NumPy", "Scikit-learn", "TensorFlow", "PyTorch", "Jupyter", "Matplotlib",
            "Seaborn", "SQL", "Excel", "Power BI", "Tableau", "R", "Keras", "XGBoost",
        ],
        mission_hooks=[
            "analyzing patterns in how children learn and respond to different activities",
            "creating visualizations that help parents understand their child's progress",
            "making data insights accessible to non-technical users",
        ],
        scenarios=[
            "Imagine you have data showing a child's activity levels throughout the day. How would you visualize this for a parent?",
            "How would you explain a machine learning prediction to someone who has never heard of ML?",
        ],
        friendly_questions=[
            "Have you worked with Python or any data tools before? Even small projects count!",
            "What's the most interesting thing you've learned from analyzing data?",
            "If you could analyze any dataset in the world, what would you choose?",
        ],
    ),
    "fullstack": TrackContext(
        track_id="fullstack",
        display_name="Full Stack Development",
        welcome_note=(
            "Full stack development is where ideas become reality! Whether you've built complete apps or "
            "just dabbled in web development, we're interested in your journey."
        ),
        tech_stack=[
            "React", "Next.js", "React Native", "Flutter", "Node.js", "Express", "MongoDB", "PostgreSQL",
            "Firebase", "Supabase", "Tailwind CSS", "TypeScript", "JavaScript", "HTML/CSS", "Vue.js",
            "Django", "Flask",
        ],
        mission_hooks=[
            "building apps that parents can use to track their child's progress",
            "creating interfaces that work well for users with different abilities",
            "creating mobile apps that work offline in areas with poor internet",
        ],
        scenarios=[
            "You're building an app for a parent who isn't tech-savvy. How would you make the interface as simple as possible?",
            "How would you design an app that needs to work even when the internet connection is slow or drops?",
        ],
        friendly_questions=[
            "What got you into web/app development? What was your first project?",
            "Have you built anything with React, Next.js, or similar frameworks?",
            "If you could build any app, what would it be?",
        ],
    ),
}


def get_track(track_id: str) -> TrackContext:
    """Return the track context, defaulting to full stack for unknown ids."""

    return TRACKS.get(track_id) or TRACKS[DEFAULT_TRACK]
