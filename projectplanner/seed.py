"""Built-in sample data written on first run so the planner is never empty."""
import copy

SAMPLE_PROJECTS = [
    {
        "id": "1",
        "title": "Mobile App Development",
        "description": "Build a new mobile application for our clients",
        "status": "active",
        "startDate": "2024-01-15",
        "endDate": "2024-03-30",
        "color": "#6366f1",
        "progress": 65,
        "tasks": [
            {
                "id": "1-1",
                "title": "UI/UX Design",
                "description": "Create wireframes and mockups",
                "status": "completed",
                "priority": "high",
                "startDate": "2024-01-15",
                "endDate": "2024-02-01",
                "projectId": "1",
                "progress": 100,
            },
            {
                "id": "1-2",
                "title": "Frontend Development",
                "description": "Implement React Native components",
                "status": "in-progress",
                "priority": "high",
                "startDate": "2024-02-01",
                "endDate": "2024-03-15",
                "projectId": "1",
                "progress": 70,
            },
            {
                "id": "1-3",
                "title": "Backend API",
                "description": "Develop REST API endpoints",
                "status": "in-progress",
                "priority": "medium",
                "startDate": "2024-02-15",
                "endDate": "2024-03-20",
                "projectId": "1",
                "progress": 40,
            },
            {
                "id": "1-4",
                "title": "Testing & QA",
                "description": "Comprehensive testing and bug fixes",
                "status": "todo",
                "priority": "high",
                "startDate": "2024-03-15",
                "endDate": "2024-03-30",
                "projectId": "1",
                "progress": 0,
            },
        ],
    },
    {
        "id": "2",
        "title": "Website Redesign",
        "description": "Modernize company website with new branding",
        "status": "planning",
        "startDate": "2024-02-01",
        "endDate": "2024-04-15",
        "color": "#10b981",
        "progress": 25,
        "tasks": [
            {
                "id": "2-1",
                "title": "Brand Guidelines",
                "description": "Define new visual identity",
                "status": "completed",
                "priority": "high",
                "startDate": "2024-02-01",
                "endDate": "2024-02-15",
                "projectId": "2",
                "progress": 100,
            },
            {
                "id": "2-2",
                "title": "Content Strategy",
                "description": "Plan website content and structure",
                "status": "in-progress",
                "priority": "medium",
                "startDate": "2024-02-10",
                "endDate": "2024-03-01",
                "projectId": "2",
                "progress": 60,
            },
        ],
    },
]


def sample_projects():
    # Callers mutate the result
    return copy.deepcopy(SAMPLE_PROJECTS)
